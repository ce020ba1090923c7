from enum import StrEnum


class SpotStatus(StrEnum):
    DISPONIVEL = "disponivel"
    RESERVADA = "reservada"
    OCUPADA = "ocupada"
    MANUTENCAO = "manutencao"
