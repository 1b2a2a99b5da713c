"""
Agentes del sistema Aula GroupChat.

- Agent: participante configurable de un group chat
- FunctionRegistry: funciones que un agente puede pedir ejecutar
- Estrategias de respuesta: guion, callable o modelo de lenguaje
"""

from src.agents.agent import Agent
from src.agents.functions import FunctionDefinition, FunctionRegistry
from src.agents.strategies import CallableReply, ModelReply, ScriptedReply

__all__ = [
    "Agent",
    "FunctionDefinition",
    "FunctionRegistry",
    "ScriptedReply",
    "CallableReply",
    "ModelReply",
]
