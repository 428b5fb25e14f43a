"""Command letters of the text command protocol."""

# commands
CMD_C_D_PID = "D"  # current d PID & LPF
CMD_C_Q_PID = "Q"  # current q PID & LPF
CMD_V_PID = "V"  # velocity PID & LPF
CMD_A_PID = "A"  # angle PID & LPF
CMD_STATUS = "E"  # motor enable/disable
CMD_LIMITS = "L"  # current/voltage/velocity limits
CMD_MOTION_TYPE = "C"  # motion control type
CMD_TORQUE_TYPE = "T"  # torque control type
CMD_SENSOR = "S"  # sensor offsets
CMD_MONITOR = "M"  # monitoring
CMD_RESIST = "R"  # phase resistance
CMD_INDUCTANCE = "I"  # phase inductance
CMD_KV_RATING = "K"  # KV rating
CMD_PWMMOD = "W"  # PWM modulation

# commander configuration
CMD_SCAN = "?"
CMD_VERBOSE = "@"
CMD_DECIMAL = "#"

# PID and LPF sub-commands
SCMD_PID_P = "P"
SCMD_PID_I = "I"
SCMD_PID_D = "D"
SCMD_PID_RAMP = "R"
SCMD_PID_LIM = "L"
SCMD_LPF_TF = "F"

# limits
SCMD_LIM_CURR = "C"
SCMD_LIM_VOLT = "U"
SCMD_LIM_VEL = "V"

# sensor
SCMD_SENS_MECH_OFFSET = "M"
SCMD_SENS_ELEC_OFFSET = "E"

# monitoring
SCMD_DOWNSAMPLE = "D"
SCMD_CLEAR = "C"
SCMD_GET = "G"
SCMD_SET = "S"

# PWM modulation
SCMD_PWMMOD_TYPE = "T"
SCMD_PWMMOD_CENTER = "C"