"""Core module - Arquitectura modular de ingesta de telemetría.

Estructura:
- transport/       → Recepción MQTT
- domain/          → Mensajes, registros y estado de vida
- classification/  → Reglas de clasificación por topic
- liveness/        → Estado del broker y del nodo crítico
- broadcast/       → Fan-out a observadores
- pipeline/        → Orquestación por mensaje
- monitoring/      → Métricas y observabilidad
"""
