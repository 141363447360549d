from .generator import ScriptGenerator, ScriptProfile

__all__ = ["ScriptGenerator", "ScriptProfile"]
