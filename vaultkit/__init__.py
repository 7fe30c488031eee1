"""In-memory asset ledger with vaults, badges, access rules and financial components."""

__version__ = "0.1.0"
__all__ = [
    "ledger",
    "shares",
    "bank",
    "airdrop",
    "airdrop_with_withdraw",
    "escrow",
    "auction",
    "multisig",
    "library",
    "catalog",
]