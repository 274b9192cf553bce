"""URITHI

A rules engine for deceased estates under the Kenyan Law of Succession Act.
It keeps an estate's financial invariants consistent as assets, debts,
dependants and lifetime gifts change, and models the wills, executors and
witnesses that govern distribution. State changes are recorded as domain
events so every computed figure can be traced for court filings.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
