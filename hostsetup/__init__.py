"""Provision a host to boot the RVM hypervisor."""

__version__ = "0.3.0"
