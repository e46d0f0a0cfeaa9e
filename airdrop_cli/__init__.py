"""
Airdrop CLI

Command-line interface for the snapshot-to-distribution pipeline.

Usage:
    python -m airdrop_cli snapshot base
    python -m airdrop_cli build base --out base-merkle.json
    python -m airdrop_cli proof base-merkle.json 0x...
    python -m airdrop_cli verify base-merkle.json 0x...
    python -m airdrop_cli networks
"""

__version__ = "0.1.0"
