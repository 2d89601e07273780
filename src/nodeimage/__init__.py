"""nodeimage - VM image resolution for Kubernetes worker nodes on Azure

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Remote lookups cached with bounded staleness
- Fail with typed, recoverable errors

Given a node class and a candidate instance type, nodeimage picks the VM
image (and its distro) a new node should boot from: the newest AKS image in
a community or shared gallery, or a user's custom gallery image.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
