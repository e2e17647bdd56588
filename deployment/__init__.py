"""
Ubex Deployment
===============

Deployment and verification tooling for the Ubex contracts.

Structure:
- plans: which components each environment deploys, and in which order
- orchestrator: deploys a plan and records the resulting addresses
- harness: checks the state of deployed components
- platform: Web3 and in-memory execution platforms
- cli: the ``ubex-deploy`` command
"""

__version__ = "1.0.0"
__author__ = "Ubex Team"
