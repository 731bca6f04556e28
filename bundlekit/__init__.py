"""Service bundle specs, plan schemas, custom resource conversions, an etcd version probe and a sandbox gauge."""

__version__ = "0.1.0"