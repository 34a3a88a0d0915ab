import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CPF_REGEX = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
CNPJ_REGEX = re.compile(r"^\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}$")
CEP_REGEX = re.compile(r"^\d{5}-?\d{3}$")

BRAZILIAN_STATES = {
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
}


def normalize_email(value: str) -> str:
    cleaned = (value or "").strip().lower()
    if not EMAIL_REGEX.match(cleaned):
        raise ValueError("Email invalido")
    return cleaned


def validate_tax_id(value: str) -> str:
    cleaned = (value or "").strip()
    if not (CPF_REGEX.match(cleaned) or CNPJ_REGEX.match(cleaned)):
        raise ValueError("CPF deve ter formato 000.000.000-00 ou CNPJ 00.000.000/0000-00")
    return cleaned


def strip_required(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("Campo obrigatorio")
    return cleaned
