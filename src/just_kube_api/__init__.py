"""Provision verified kube-apiserver and etcd binaries for a local control plane."""

__version__ = "0.1.0"
