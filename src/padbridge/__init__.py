"""
padbridge: map physical controllers onto a canonical gamepad and emit
Xbox 360 style input reports to a USB gadget.

Input devices are read through evdev, routed through a mapping table into a
`CanonicalGamepad`, and encoded into the 20-byte report the gadget expects.
"""

__version__ = "0.1.0"
