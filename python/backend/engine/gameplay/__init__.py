from backend.engine.gameplay.game import GamePlay, IllegalMove

__all__ = ["GamePlay", "IllegalMove"]
