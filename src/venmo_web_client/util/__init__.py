from .money import money_to_cents, cents_to_money_str

__all__ = ["money_to_cents", "cents_to_money_str"]
