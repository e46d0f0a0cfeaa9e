"""
CLI Commands

Each command module exposes a <name>_cmd(args) handler returning an
exit code.
"""

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

from airdrop_cli.commands import build, proof, snapshot, verify  # noqa: E402

__all__ = [
    "EXIT_SUCCESS",
    "EXIT_RUNTIME_ERROR",
    "EXIT_VERIFICATION_FAILED",
    "build",
    "proof",
    "snapshot",
    "verify",
]
