from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp

from .reaction import Reaction


# One term of a complex: "A", "2A" or "2 A".
_TERM_RE = re.compile(r"^\s*(?:(\d+)\s*)?([A-Za-z_][A-Za-z0-9_]*)\s*$")

# Arrows, longest first so "<->" is not read as "->".
_ARROW_RE = re.compile(r"(<=>|<->|=>|->)")

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _parse_complex(complex_str: str) -> Dict[str, int]:
    """Parse '2A + B' into {'A': 2, 'B': 1}; '0' or '' is the empty complex."""
    s = complex_str.strip()
    if s in ("", "0", "∅"):
        return {}

    coeffs: Dict[str, int] = {}
    for part in (p.strip() for p in s.split("+")):
        if not part:
            continue
        m = _TERM_RE.match(part)
        if not m:
            raise ValueError(f"Could not parse complex term: '{part}'")
        c = int(m.group(1)) if m.group(1) is not None else 1
        coeffs[m.group(2)] = coeffs.get(m.group(2), 0) + c
    return coeffs


def _complex_to_vector(complex_dict: Dict[str, int], species_order: Sequence[str]) -> Tuple[int, ...]:
    unknown = set(complex_dict) - set(species_order)
    if unknown:
        raise ValueError(f"Species {sorted(unknown)} not in species_names {list(species_order)}")
    return tuple(int(complex_dict.get(name, 0)) for name in species_order)


def _split_rate_brackets(s: str) -> Tuple[List[str], str]:
    """Strip leading '[k1]', '[k1][km1]' or '[k1, km1]' blocks from ``s``."""
    tokens: List[str] = []
    rest = s.strip()
    while rest.startswith("["):
        end = rest.find("]")
        if end == -1:
            raise ValueError(f"Unclosed '[' in rate annotation: '{s}'")
        tokens.extend(p.strip() for p in re.split(r"[;,]", rest[1:end]) if p.strip())
        rest = rest[end + 1 :].strip()
    return tokens, rest


@dataclass
class ReactionParser:
    """Parse reaction strings into stochastic mass-action `Reaction` objects.

    One reaction per line (or separated by ';'); lines starting with '#' are
    skipped. Birth and death channels use the empty complex '0':

        0 ->[b] A
        A ->[d] 0
        2A <->[k1][km1] B

    Rate tokens may be names (turned into SymPy symbols) or numbers
    (e.g. ``A ->[0.5] 0``). Missing rates are auto-named k1, k2, ... with
    km1, km2, ... for the reverse direction of reversible reactions.
    """

    rate_prefix: str = "k"
    assume_positive_rates: bool = True

    def parse_network(self, text: str, species_names: Optional[Sequence[str]] = None):
        lines = []
        for chunk in text.split(";"):
            for ln in chunk.splitlines():
                ln = ln.strip()
                if ln and not ln.startswith("#"):
                    lines.append(ln)
        if not lines:
            raise ValueError("No reactions found in input")

        split = [self._split_reaction_line(ln) for ln in lines]

        if species_names is None:
            seen: Dict[str, None] = {}
            for lhs, _arrow, rhs, _rates in split:
                for name in list(_parse_complex(lhs)) + list(_parse_complex(rhs)):
                    seen.setdefault(name, None)
            species_order = sorted(seen)
        else:
            species_order = list(species_names)
        if not species_order:
            raise ValueError("Reactions do not mention any species")

        reactions: List[Reaction] = []
        for idx, (ln, (lhs_str, arrow, rhs_str, tokens)) in enumerate(zip(lines, split), start=1):
            lhs = _complex_to_vector(_parse_complex(lhs_str), species_order)
            rhs = _complex_to_vector(_parse_complex(rhs_str), species_order)

            n_rates = 2 if arrow == "<->" else 1
            if len(tokens) > n_rates:
                raise ValueError(f"Too many rate tokens for reaction '{ln}'; expected at most {n_rates}")

            forward = tokens[0] if tokens else f"{self.rate_prefix}{idx}"
            reactions.append(Reaction(lhs, rhs, self._make_rate(forward)))
            if arrow == "<->":
                reverse = tokens[1] if len(tokens) > 1 else f"{self.rate_prefix}m{idx}"
                reactions.append(Reaction(rhs, lhs, self._make_rate(reverse)))

        from .network import ReactionNetwork  # local import to avoid circular import

        return ReactionNetwork(n_species=len(species_order), reactions=reactions, species_names=species_order)

    def _make_rate(self, token: str) -> sp.Expr:
        """Number tokens become SymPy Floats, anything else a rate symbol."""
        if _NUMBER_RE.match(token):
            return sp.Float(token)
        if self.assume_positive_rates:
            return sp.Symbol(token, positive=True)
        return sp.Symbol(token)

    @staticmethod
    def _split_reaction_line(line: str) -> Tuple[str, str, str, List[str]]:
        """Split a reaction line into (lhs, arrow, rhs, rate_tokens)."""
        m = _ARROW_RE.search(line)
        if not m:
            raise ValueError(f"No supported arrow found in line: '{line}'")
        arrow = "<->" if m.group(1) in {"<->", "<=>"} else "->"

        tokens, rhs = _split_rate_brackets(line[m.end() :])
        if rhs == "":
            raise ValueError(f"Missing product complex in line: '{line}' (use '0' for none)")
        return line[: m.start()].strip(), arrow, rhs, tokens
