"""
회비 알림 다국어 메시지

지원 언어: ko, en, ja, zh, de, fr, es, it, pt, ru (기본 en)
"""
from typing import Dict, Tuple

DEFAULT_LANGUAGE = "en"

# 회비 유형별 라벨
DUES_TYPE_LABELS: Dict[str, Dict[str, str]] = {
    "join": {
        "ko": "가입비",
        "en": "Registration Fee",
        "ja": "入会費",
        "zh": "入会费",
        "de": "Anmeldegebühr",
        "fr": "Frais d'inscription",
        "es": "Cuota de inscripción",
        "it": "Quota di iscrizione",
        "pt": "Taxa de inscrição",
        "ru": "Регистрационный взнос",
    },
    "monthly": {
        "ko": "월회비",
        "en": "Monthly Dues",
        "ja": "月会費",
        "zh": "月费",
        "de": "Monatsbeitrag",
        "fr": "Cotisation mensuelle",
        "es": "Cuota mensual",
        "it": "Quota mensile",
        "pt": "Mensalidade",
        "ru": "Ежемесячный взнос",
    },
    "yearly": {
        "ko": "연회비",
        "en": "Annual Dues",
        "ja": "年会費",
        "zh": "年费",
        "de": "Jahresbeitrag",
        "fr": "Cotisation annuelle",
        "es": "Cuota anual",
        "it": "Quota annuale",
        "pt": "Anuidade",
        "ru": "Годовой взнос",
    },
    "late_fee": {
        "ko": "연체료",
        "en": "Late Fee",
        "ja": "延滞料",
        "zh": "滞纳金",
        "de": "Säumnisgebühr",
        "fr": "Frais de retard",
        "es": "Recargo por mora",
        "it": "Penale per ritardo",
        "pt": "Multa por atraso",
        "ru": "Пеня за просрочку",
    },
}

REMINDER_TITLES: Dict[str, str] = {
    "ko": "회비 납부 안내",
    "en": "Dues Reminder",
    "ja": "会費のお知らせ",
    "zh": "会费提醒",
    "de": "Beitragserinnerung",
    "fr": "Rappel de cotisation",
    "es": "Recordatorio de cuota",
    "it": "Promemoria quota",
    "pt": "Lembrete de mensalidade",
    "ru": "Напоминание о взносе",
}

# {club}, {period}, {label}, {amount}, {days}
REMINDER_BODIES: Dict[str, str] = {
    "ko": "[{club}] {period} {label} {amount} 납부 마감이 {days}일 남았습니다.",
    "en": "[{club}] Your {period} {label} of {amount} is due in {days} day(s).",
    "ja": "[{club}] {period} {label} {amount}の納付期限まであと{days}日です。",
    "zh": "[{club}] {period} {label} {amount}距离缴费截止还有{days}天。",
    "de": "[{club}] Ihr {label} für {period} über {amount} ist in {days} Tag(en) fällig.",
    "fr": "[{club}] Votre {label} de {period} ({amount}) est due dans {days} jour(s).",
    "es": "[{club}] Tu {label} de {period} ({amount}) vence en {days} día(s).",
    "it": "[{club}] La tua {label} di {period} ({amount}) scade tra {days} giorno/i.",
    "pt": "[{club}] Sua {label} de {period} ({amount}) vence em {days} dia(s).",
    "ru": "[{club}] {label} за {period} ({amount}): до срока оплаты осталось {days} дн.",
}

CURRENCY_SYMBOLS = {"USD": "$", "KRW": "₩", "EUR": "€", "JPY": "¥", "GBP": "£"}


def dues_label(dues_type: str, lang: str) -> str:
    labels = DUES_TYPE_LABELS.get(dues_type)
    if not labels:
        return dues_type
    return labels.get(lang) or labels[DEFAULT_LANGUAGE]


def format_amount(amount: float, currency: str) -> str:
    """30.0 → $30, 20.5 → $20.50"""
    text = f"{amount:,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{symbol}{text}"
    return f"{text} {currency}"


def build_reminder_message(
    lang: str,
    club_name: str,
    dues_type: str,
    period: str,
    amount: float,
    currency: str,
    days_remaining: int
) -> Tuple[str, str]:
    """납부 임박 알림 (제목, 본문)"""
    if lang not in REMINDER_BODIES:
        lang = DEFAULT_LANGUAGE

    body = REMINDER_BODIES[lang].format(
        club=club_name,
        period=period,
        label=dues_label(dues_type, lang),
        amount=format_amount(amount, currency),
        days=days_remaining,
    )
    return REMINDER_TITLES[lang], body
