"""NMEA parsing, motion detection, GSM alerts and alarm logic for an anti-theft backpack."""

__version__ = "0.1.0"

__all__ = ["controller", "gps", "gsm", "imu", "nmea", "nmea_scan", "nmea_types"]