from __future__ import annotations


DEFAULT_LANGUAGE = "en"

SUPPORTED_LANGUAGES = {
    "en": {"name": "English", "label": "English", "flag": "🇺🇸"},
    "id": {"name": "Indonesian", "label": "Bahasa", "flag": "🇮🇩"},
    "zh": {"name": "Chinese", "label": "中文", "flag": "🇨🇳"},
    "ja": {"name": "Japanese", "label": "日本語", "flag": "🇯🇵"},
    "fr": {"name": "French", "label": "Français", "flag": "🇫🇷"},
}

WELCOME_MESSAGES = {
    "en": "Hi! I'm EnvAI, your personal eco-bot. How can I help you today?",
    "id": "Halo! Aku EnvAI, robot eko pribadimu. Apa yang bisa kubantu hari ini?",
    "zh": "你好！我是 EnvAI，你的私人环境机器人。今天有什么可以帮你的？",
    "ja": "こんにちは！私はあなたのパーソナル・エコボット、EnvAIです。今日は何かお手伝いしましょうか？",
    "fr": "Salut ! Je suis EnvAI, ton éco-bot personnel. Comment puis-je t'aider aujourd'hui ?",
}

FAQ_ENTRIES = {
    "en": [
        {"q": "What is EnvWrist?", "a": "EnvWrist is an environmental platform helping you monitor air quality and weather precisely."},
        {"q": "What are VOCs?", "a": "VOCs are chemicals in the air. Lower is better for your health!"},
        {"q": "How accurate is it?", "a": "We use EnvAI and satellite grounding for high reliability."},
    ],
    "id": [
        {"q": "Apa itu EnvWrist?", "a": "EnvWrist adalah platform lingkungan yang membantu memantau kualitas udara dan cuaca dengan presisi."},
        {"q": "Apa itu VOC?", "a": "VOC adalah senyawa kimia di udara. Semakin rendah semakin baik untuk kesehatanmu!"},
        {"q": "Seberapa akurat ini?", "a": "Kami menggunakan EnvAI dan satelit untuk reliabilitas tinggi."},
    ],
    "zh": [
        {"q": "什么是 EnvWrist？", "a": "EnvWrist 是一个帮助你精确监测空气质量和天气的环境智能平台。"},
        {"q": "什么是 VOCs？", "a": "VOCs 是空气中的挥发性有机化合物。水平越低，对你的健康越好！"},
        {"q": "准确度如何？", "a": "我们结合了 EnvAI 和卫星地面站技术，确保数据的高度可靠性。"},
    ],
    "ja": [
        {"q": "EnvWristとは？", "a": "EnvWristは、空気の質や天気を正確に監視する環境インテリジェンス・プラットフォームです。"},
        {"q": "VOCsとは？", "a": "VOCsは空気中の揮発性有機化合物です。値が低いほど健康に良いです！"},
        {"q": "精度はどうですか？", "a": "EnvAIと衛星データを活用し、高い信頼性を実現しています。"},
    ],
    "fr": [
        {"q": "Qu'est-ce qu'EnvWrist ?", "a": "EnvWrist est une plateforme d'intelligence environnementale pour surveiller la qualité de l'air et la météo."},
        {"q": "Que sont les COV ?", "a": "Les COV sont des composés organiques volatils. Plus le niveau est bas, mieux c'est pour votre santé !"},
        {"q": "Est-ce précis ?", "a": "Nous utilisons EnvAI et des données satellites pour une haute fiabilité."},
    ],
}


def normalize_language(language: str | None) -> str:
    normalized = str(language or DEFAULT_LANGUAGE).strip().lower().replace("_", "-")
    short = normalized.split("-")[0]
    if short in SUPPORTED_LANGUAGES:
        return short
    return DEFAULT_LANGUAGE


def language_name(language: str | None) -> str:
    return SUPPORTED_LANGUAGES[normalize_language(language)]["name"]


def describe_languages() -> list[dict]:
    return [
        {
            "code": code,
            "name": data["name"],
            "label": data["label"],
            "flag": data["flag"],
            "welcome": WELCOME_MESSAGES[code],
            "faq": FAQ_ENTRIES[code],
        }
        for code, data in SUPPORTED_LANGUAGES.items()
    ]
