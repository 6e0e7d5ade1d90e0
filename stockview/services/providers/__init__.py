from .yahoo import YahooFinanceClient

__all__ = ["YahooFinanceClient"]
