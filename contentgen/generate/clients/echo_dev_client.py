# Dummy model client for local dev and testing without API calls.

from typing import List, Tuple, Dict, Any
from ..types import Message

class EchoDevClient:
    engine = "Echo"

    def __init__(self):
        self.model = "echo-dev"
        self.calls: List[List[Message]] = []

    def generate(self, messages: List[Message]) -> Tuple[str, Dict[str, Any]]:
        self.calls.append(list(messages))
        user_inputs = [m.content for m in messages if m.role == "user"]
        text = f"[ECHO RESPONSE]\n{user_inputs[-1] if user_inputs else '(no user input)'}"
        meta = {"engine": "echo", "model": "echo-dev", "turns": len(messages)}
        return text, meta
