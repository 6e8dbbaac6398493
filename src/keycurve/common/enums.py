from enum import Enum


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def from_str(cls, side_str):
        if side_str.upper() == OrderSide.BUY.name:
            return OrderSide.BUY
        elif side_str.upper() == OrderSide.SELL.name:
            return OrderSide.SELL
        else:
            raise NotImplementedError(f"No order side enum for {side_str}")

    @classmethod
    def from_is_buy(cls, is_buy: bool) -> "OrderSide":
        return OrderSide.BUY if is_buy else OrderSide.SELL

    @property
    def is_buy(self) -> bool:
        return self is OrderSide.BUY

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()
