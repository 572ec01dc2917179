"""Lint rules for Terraform configurations of Microsoft Fabric resources, with an HCL reader and provider schema helpers."""

__version__ = "0.1.0"