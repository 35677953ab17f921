"""HapSNPeval: accuracy of reconstructed haplotypes against the true haplotypes.

Public API is intentionally small; most users should use the CLI:

    hapsnpeval -p true_haplotype_prefix alignment.fa

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.1.0"
