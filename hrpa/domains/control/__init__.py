from hrpa.domains.control.service import SwipeResult, TapResult, UiController

__all__ = ["SwipeResult", "TapResult", "UiController"]
