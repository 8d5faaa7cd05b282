"""Prompts for scholarly Hebrew/English translation."""

SYSTEM_INSTRUCTION = (
    "You are an expert translator specializing in complex Jewish theological "
    "texts, moving between Hebrew and sophisticated English."
)

TONE_INSTRUCTIONS = {
    "scholarly": "scholarly and academic",
    "literal": "precise and literal",
    "modern": "contemporary and accessible",
}

COMPLEXITY_INSTRUCTIONS = {
    "detailed": "Ensure all nuances and cross-references are maintained.",
    "concise": "Keep the translation direct and avoid redundant philosophical terminology.",
}

LANGUAGE_NAMES = {
    "en": "English",
    "he": "Hebrew",
}

TRANSLATION_PROMPT = """Translate the following {source_language} content into clear, {tone} {target_language}.
The content is related to Jewish theology, Chassidic philosophy, and the concepts of Redemption (Geulah) and Moshiach.

RULES:
1. Maintain all HTML tags (like <p>, <strong>, <h1>) in their exact positions.
2. Use formal language suitable for religious studies.
3. {complexity}
4. Retain specific transliterated terms like 'Moshiach', 'Geulah'.
5. Return only the translated HTML, without commentary or code fences.

Source {source_language} Content:
{content}"""


def build_translation_prompt(
    content: str,
    source_language: str,
    target_language: str,
    tone: str = "scholarly",
    complexity: str = "detailed"
) -> str:
    """Fill the translation prompt for a language pair and style."""
    return TRANSLATION_PROMPT.format(
        source_language=LANGUAGE_NAMES[source_language],
        target_language=LANGUAGE_NAMES[target_language],
        tone=TONE_INSTRUCTIONS[tone],
        complexity=COMPLEXITY_INSTRUCTIONS[complexity],
        content=content,
    )
