"""Offline Zeek installer.

Two entry points share this package:
- ``zeek-stage`` (build host): downloads every architecture of the Zeek image,
  records the release in VERSION and seals the ACH-Zeek archive.
- ``zeek-installer`` (target host): checks the host, retires Bro, installs
  Docker and the Zeek image, and optionally starts Zeek as a sensor.

Every install step is idempotent; a failed run is fixed by re-running.
"""

__version__ = "1.0.0"

__all__ = []
