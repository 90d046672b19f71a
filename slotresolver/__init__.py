"""
slotresolver - Appointment availability for barbershops.
"""

__version__ = "0.1.0"
