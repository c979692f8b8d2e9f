from .wallet_service import WalletService, post_credit, post_debit, refund_amount

__all__ = ["WalletService", "post_credit", "post_debit", "refund_amount"]
