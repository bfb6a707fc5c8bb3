"""
Compiler options shared by every pipeline stage.
"""
from dataclasses import dataclass, field
from typing import Dict, Set


# Program entry label of the emitted assembly
ENTRY_LABEL = "_start"

# Intrinsic subroutine name -> runtime library symbol
DEFAULT_INTRINSICS: Dict[str, str] = {
    "Output": "print_int",
}


@dataclass
class CompilerOptions:
    """Knobs for one compilation."""
    # Reject reads of and assignments to names that were never declared
    strict_declarations: bool = True
    intrinsics: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_INTRINSICS))
    # Shown in the header comment of the generated assembly
    program_name: str = "prog.s"

    def resolve_subroutine(self, name: str) -> str:
        """Map an intrinsic to its runtime symbol; user routines pass through."""
        return self.intrinsics.get(name, name)

    def reserved_symbols(self) -> Set[str]:
        """Symbols the emitted program defines or branches to besides its variables."""
        return {ENTRY_LABEL, *self.intrinsics.values()}
