"""Example machine definitions."""

from typing import Dict, FrozenSet, List, NamedTuple

from .machine import MachineDefinition


class MachinePreset(NamedTuple):
    transitions: List[str]
    default_input: str
    accept_states: FrozenSet[str]
    description: str

    def definition(self, declare_accept: bool = True) -> MachineDefinition:
        return MachineDefinition(
            self.transitions,
            accept_states=self.accept_states if declare_accept else None,
        )


# Duplicate a string of 0's & 1's delimited by B's.
# B<bits>B becomes B<bits>B<bits> and the head parks left of the first B.
DUPLICATE_BINARY_STRING = [
    "Q0:B/B->R:Q1",  # Skip the first B

    "Q1:0/0->R:Q1",  # Find the closing B and mark it with C
    "Q1:1/1->R:Q1",
    "Q1:B/C->L:Q2",

    "Q2:0/0->L:Q2",  # Rewind to the initial B, an X or a Y
    "Q2:1/1->L:Q2",
    "Q2:C/C->L:Q2",
    "Q2:B/B->R:Q3",
    "Q2:X/X->R:Q3",
    "Q2:Y/Y->R:Q3",

    "Q3:0/X->R:Q10",  # Mark a 0 as X and go append a 0
    "Q3:1/Y->R:Q20",  # Mark a 1 as Y and go append a 1
    "Q3:C/B->L:Q30",  # Reached C: copying is done, restore the marks

    "Q10:0/0->R:Q10",
    "Q10:1/1->R:Q10",
    "Q10:C/C->R:Q10",
    "Q10:_/0->L:Q2",

    "Q20:0/0->R:Q20",
    "Q20:1/1->R:Q20",
    "Q20:C/C->R:Q20",
    "Q20:_/1->L:Q2",

    "Q30:X/0->L:Q30",
    "Q30:Y/1->L:Q30",
    "Q30:B/B->L:Q99",
]

DUPLICATE_BINARY_STRING_INPUT = "B00101100000011B"

# Recognise a^i b^j c^k with i*j == k, terminated by F.
# aabbbccccccF halts in Q6; aabbbcccccF gets stuck in Q2, aabbbcccccccF in Q5.
A_TIMES_B_EQUALS_C = [
    "Q0:a/X->R:Q1",
    "Q0:b/b->R:Q5",
    "Q1:a/a->R:Q1",
    "Q1:b/Y->R:Q2",
    "Q1:Z/Z->L:Q4",
    "Q2:Z/Z->R:Q2",
    "Q2:b/b->R:Q2",
    "Q2:c/Z->L:Q3",
    "Q3:Z/Z->L:Q3",
    "Q3:b/b->L:Q3",
    "Q3:Y/Y->R:Q1",
    "Q4:a/a->L:Q4",
    "Q4:Y/b->L:Q4",
    "Q4:X/X->R:Q0",
    "Q5:Z/Z->R:Q5",
    "Q5:b/b->R:Q5",
    "Q5:F/F->L:Q6",
]

A_TIMES_B_EQUALS_C_INPUT = "aabbbccccccF"

PRESETS: Dict[str, MachinePreset] = {
    "duplicate": MachinePreset(
        DUPLICATE_BINARY_STRING,
        DUPLICATE_BINARY_STRING_INPUT,
        frozenset({"Q99"}),
        "Copy a B-delimited bitstring after itself",
    ),
    "a-times-b": MachinePreset(
        A_TIMES_B_EQUALS_C,
        A_TIMES_B_EQUALS_C_INPUT,
        frozenset({"Q6"}),
        "Accept a^i b^j c^k F when i*j == k",
    ),
}
