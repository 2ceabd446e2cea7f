"""
Shared type aliases for token amounts and identifiers.

Balances themselves live with the host: the core only computes how much has
to move and where.
"""

TokenId = str  # e.g. "0x1::aptos_coin::AptosCoin"
Owner = str  # opaque account identifier supplied by the host
Amount = int  # non-negative, u64 domain
Timestamp = int  # seconds; 0 disables time-dependent updates
