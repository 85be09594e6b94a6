"""Counter and BCD decoder model with VCD tracing, a Vbuddy serial driver and a testbench."""

__version__ = "0.1.0"