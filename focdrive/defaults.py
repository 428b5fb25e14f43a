"""Default configuration values for motors, controllers and filters."""

DEF_POWER_SUPPLY = 12.0  # default power supply voltage

# velocity PI controller
DEF_PID_VEL_P = 0.5
DEF_PID_VEL_I = 10.0
DEF_PID_VEL_D = 0.0
DEF_PID_VEL_RAMP = 1000.0
DEF_PID_VEL_LIMIT = DEF_POWER_SUPPLY

# current PID controllers
DEF_PID_CURR_P = 3.0
DEF_PID_CURR_I = 300.0
DEF_PID_CURR_D = 0.0
DEF_PID_CURR_RAMP = 0.0
DEF_PID_CURR_LIMIT = DEF_POWER_SUPPLY
DEF_CURR_FILTER_TF = 0.005

# current limit in amps
DEF_CURRENT_LIM = 2.0

# downsampling
DEF_MON_DOWNSAMPLE = 100
DEF_MOTION_DOWNSAMPLE = 0

# angle P controller
DEF_P_ANGLE_P = 20.0
DEF_VEL_LIM = 20.0

# index search velocity
DEF_INDEX_SEARCH_TARGET_VELOCITY = 1.0
# sensor and motor zero alignment voltage
DEF_VOLTAGE_SENSOR_ALIGN = 3.0
# velocity low pass filter time constant
DEF_VEL_FILTER_TF = 0.005

# per-phase current sense low pass filter time constant
DEF_LPF_PER_PHASE_CURRENT_SENSE_TF = 0.0