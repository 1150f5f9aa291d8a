"""Bituin -- the MicroScript package manager.

Scaffolds MicroScript projects and runs them through the MicroScript
interpreter.

Quick usage::

    from bituin.cli import main

    exit_code = main(["new", "hello"])
"""

from bituin.config import AUTHOR, VERSION, Settings
from bituin.project import InitMode, ProjectInitializer
from bituin.runner import ProjectRunner, RunResult

__version__ = VERSION.lstrip("v")

__all__ = [
    "AUTHOR",
    "VERSION",
    "InitMode",
    "ProjectInitializer",
    "ProjectRunner",
    "RunResult",
    "Settings",
]
