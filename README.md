# focdrive

Field oriented control (FOC) for brushless DC motors, in plain Python.

The package covers the control side of a motor controller: the math, the
control loops and a text command protocol. You reach the hardware through
small abstract classes. Subclass them for your own PWM driver, angle sensor
and current sensor.

## Modules

- `focdrive.foc_utils`: the helpers `fast_sin`, `fast_cos`,
  `normalize_angle`, `electrical_angle`, `sqrt_approx`, `constrain`, `sign`,
  `is_set` and `round_half_away`. It also has the `DQCurrent`,
  `PhaseCurrent` and `DQVoltage` dataclasses. `fast_sin` and `fast_cos` are
  table-based and only accept angles in [0, 2π]. They raise `ValueError`
  outside that range. `NOT_SET` marks a parameter that has not been given.
- `focdrive.defaults`: the default gains, limits and filter time constants.
- `focdrive.timing`: the `Clock` interface and two clocks. `SystemClock`
  uses the monotonic timer. `ManualClock` only moves when you call
  `advance(us)` or `delay(ms)`. Both give a microsecond timestamp that wraps
  at 2**32.
- `focdrive.pid`: `PIDController`. You call it with the tracking error and
  it returns the output. The integral uses Tustin integration with
  anti-windup. The output is clamped to `limit` and its rate of change is
  limited by `output_ramp`. `reset()` clears the stored state.
- `focdrive.lowpass`: `LowPassFilter`, a first-order filter called with
  each sample. If more than 0.3 s pass between samples it restarts from the
  input.
- `focdrive.drivers`: the abstract `BLDCDriver` and the `PhaseState` enum.
- `focdrive.sensor`: the abstract `Sensor`. A subclass implements
  `read_sensor_angle()`. The base class counts full rotations in `update()`.
  It also provides `angle()`, `mechanical_angle()`, `precise_angle()`,
  `full_rotations()` and `measure_velocity()`. `Direction` and `Pullup` are
  here too.
- `focdrive.current_sense`: the abstract `CurrentSense`. A subclass
  implements `init()`, `driver_align()` and `get_phase_currents()`. The base
  class provides `get_dc_current()` and `get_foc_currents()`, which apply
  the Clarke and Park transforms.
- `focdrive.modulation`: `sine_pwm`, `space_vector_pwm`, `trapezoid_120`
  and `trapezoid_150`, all returning a `PhaseOutput`. It also has
  `inverse_park` and the open-loop helpers `openloop_sample_time`,
  `openloop_velocity_step`, `openloop_angle_step` and `openloop_voltage`.
- `focdrive.foc_motor`: the abstract `FOCMotor`. It holds the motor state,
  the PID controllers and filters, and the sensor readings. `monitor()`
  writes the variables chosen by `monitor_variables`, separated by tabs.
  The enums `MotionControlType`, `TorqueControlType`, `FOCModulationType`,
  `FOCMotorStatus` and `MonitorVariable` are here too.
- `focdrive.bldc_motor`: `BLDCMotor`, which provides `init`, `enable`,
  `disable`, `init_foc`, `loop_foc`, `move` and `set_phase_voltage`.
  - `init_foc` finds the sensor direction and the zero electric angle. It
    searches for the index first when the sensor needs one, and then checks
    the current sense.
  - `loop_foc` runs voltage, DC-current or FOC-current torque control.
  - `move` runs the torque, velocity or angle loop, closed or open.
- `focdrive.commander`: `Commander`, a line-based command protocol.
  - `add(letter, callback, label)` registers a command.
  - `execute(line)` runs one line.
  - `run(reader)` reads characters with `reader.read(1)` and executes each
    finished line.
  - Built-in commands: `?` lists the registered commands, `@` sets the
    `VerboseMode`, and `#` sets the number of decimal places.
  - `pid()`, `lpf()` and `scalar()` read or set a `PIDController`, a
    `LowPassFilter` or a plain value. `parse_float` and `parse_int` read
    leading numbers.
- `focdrive.motion_commander`: `MotionCommander`, a `Commander` with
  `motion()` and `target()` for a motor.
  - `C` sets the motion control type, and `CD` sets the motion downsample.
  - `T` sets the torque control type.
  - `E` enables or disables the motor.
  - Anything else is read as a target. Velocity modes also accept a torque
    limit after it. Angle modes accept a velocity limit and then a torque
    limit.

## Example: an open-loop motor

```python
from focdrive.bldc_motor import BLDCMotor
from focdrive.drivers import BLDCDriver
from focdrive.foc_motor import MotionControlType
from focdrive.timing import ManualClock


class PrintingDriver(BLDCDriver):
    def init(self):
        self.initialized = True
        return True

    def enable(self):
        pass

    def disable(self):
        pass

    def set_pwm(self, ua, ub, uc):
        print(f"{ua:.2f} {ub:.2f} {uc:.2f}")

    def set_phase_state(self, sa, sb, sc):
        pass


clock = ManualClock(0)
driver = PrintingDriver()
driver.voltage_limit = 12.0
driver.init()

motor = BLDCMotor(7, clock=clock)
motor.link_driver(driver)
motor.controller = MotionControlType.VELOCITY_OPENLOOP
motor.init()

for _ in range(5):
    clock.advance(1000)
    motor.loop_foc()
    motor.move(2.0)
```

With a `ManualClock` the example runs as fast as possible and prints the
same output on every run. Pass a `SystemClock` to run in real time.

## Example: commands

```python
import io

from focdrive.commander import Commander
from focdrive.pid import PIDController
from focdrive.timing import ManualClock

out = io.StringIO()
commander = Commander(out)
pid = PIDController(1.0, 0.0, 0.0, 0.0, 10.0, ManualClock(0))
commander.add("P", lambda cmd: commander.pid(pid, cmd), "pid")

commander.execute("PP1.5\n")
print(out.getvalue())  # "P: 1.500\n"
print(pid.p)           # 1.5
```

## What the package does not do

- **No hardware classes.** There are no concrete drivers, sensors or current
  sensors. The package only has the abstract `BLDCDriver`, `Sensor` and
  `CurrentSense`.
- **No stepper motor class.**
- **No full motor command set.** The command protocol covers the callbacks
  registered with `Commander.add`, PID and filter settings, scalars, and the
  motion, torque, enable and target commands of `MotionCommander`. It has no
  single handler for a motor's limits, PID tuning, sensor offsets,
  modulation type or monitoring selection. Set those through the motor's
  attributes, or register your own callbacks for them.
- **No command-line program.**

## Tests

```
pip install -e .[test]
pytest
```