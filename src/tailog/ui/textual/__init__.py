from .tail_widget import TailWidget

__all__ = ["TailWidget"]
