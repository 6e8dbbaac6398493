from decimal import Decimal

from keycurve.common.math import Number, to_decimal


class FormatHelper:
    """
    Scale-aware display strings for prices and key amounts.
    Presentation only: nothing returned here should be parsed back into a computation.
    """

    @staticmethod
    def format_price(price: Number) -> str:
        """
        < 0.001   -> scientific notation, 2 decimals (e.g. '5.00e-4')
        < 1       -> 4 decimals
        < 1000    -> 2 decimals
        otherwise -> grouped integer (e.g. '12,346')
        """
        value = to_decimal(price)
        if value < Decimal("0.001"):
            return f"{value:.2e}"
        elif value < Decimal("1"):
            return f"{value:.4f}"
        elif value < Decimal("1000"):
            return f"{value:.2f}"
        return f"{value:,.0f}"

    @staticmethod
    def format_amount(amount: Number) -> str:
        value = to_decimal(amount)
        if value < Decimal("1000"):
            return f"{value:.1f}"
        elif value < Decimal("1000000"):
            return f"{value / Decimal('1000'):.1f}K"
        return f"{value / Decimal('1000000'):.1f}M"
