"""Field oriented control for BLDC motors: modulation, PID and low-pass filters, sensor and current sense bases, and a text command protocol."""

__version__ = "0.1.0"