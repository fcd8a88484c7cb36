"""vsprovision - declarative VM provisioning for VMware vSphere."""

__version__ = "0.1.0"
