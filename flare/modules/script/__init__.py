"""
Script Module - Black Box Interface

Purpose: Turn flare.file source into an executable sequence of directives
Interface: parse(), Script, Directive, Reference
Hidden: Syntax tree handling

Can be replaced with a different script front end producing the same model.
"""

from .models import DictValue, Directive, ListValue, Reference, Script
from .parser import parse

__all__ = ["DictValue", "Directive", "ListValue", "Reference", "Script", "parse"]
