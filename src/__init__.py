"""
Aula GroupChat - Orquestación de conversaciones multi-agente.

Un conjunto pequeño de agentes intercambia mensajes por turnos hacia un
objetivo. Un manager elige quién habla, resuelve las llamadas a función
de los agentes y detecta cuándo termina la conversación.

Módulos principales:
- `core`: Tipos (Message, ChatResult...) y excepciones
- `agents`: Agent, registro de funciones y estrategias de respuesta
- `groupchat`: GroupChat, selección de turno, manager y punto de entrada
- `models`: Capa de abstracción para modelos de lenguaje (Ollama, OpenAI local)
- `workloads`: Ejemplo de clase de matemáticas (admin, profesor, alumno)
- `utils`: Logging y métricas

Ejemplo de uso rápido:
    ```python
    from src.agents import Agent, ScriptedReply
    from src.groupchat import GroupChat, GroupChatManager

    alice = Agent("Alice", ScriptedReply(["Hola"], fallback="..."))
    bob = Agent("Bob", ScriptedReply(["[GROUPCHAT_TERMINATE]"]))

    manager = GroupChatManager(GroupChat([alice, bob]), max_round=10)
    result = await manager.run()
    print(result.reason)  # TerminationReason.EXPLICIT_TERMINATE
    ```
"""

__version__ = "0.1.0"
__author__ = "ThaleOn AI Systems"
