"""
Gemini prompt factory.

Prompts are stateless: the system instruction is a constant and the user
prompt only depends on the content being judged and its kind.
"""

from aicheck.config import settings
from aicheck.schemas.analysis import ContentKind

REASONING_SYSTEM_INSTRUCTION = """[PERSONA]
    You are an expert forensic analyst who decides whether content was produced by generative AI or by a human.

    [RULES]
    * Base the decision on concrete, observable evidence: repetition, structure, vocabulary, coherence, and markers typical of AI versus human authorship.
    * Do not guess. When the evidence is mixed, report a confidence close to 0.5.
    * Confidence is your certainty in the label you give, between 0.0 and 1.0.

    [OUTPUT FORMAT]
    Respond strictly in JSON, with no surrounding prose:
    {
      "isAI": true,
      "confidence": 0.85,
      "reasoning": "One or two sentences naming the specific evidence.",
      "indicators": ["indicator one", "indicator two"]
    }
    """

_TASKS = {
    ContentKind.TEXT: "Analyze the following text and determine whether it was generated by artificial intelligence or written by a human.",
    ContentKind.DOCUMENT: "Analyze the following document and determine whether it was generated by artificial intelligence or written by a human.",
    ContentKind.IMAGE: "Analyze the attached image and determine whether it was generated or manipulated by artificial intelligence.",
    ContentKind.VIDEO: "Analyze the attached video and determine whether it was generated or manipulated by artificial intelligence.",
}


def build_reasoning_prompt(kind: ContentKind, text: str = None) -> str:
    """User prompt for one reasoning call; `text` is truncated to `reasoning_prompt_chars`."""
    task = _TASKS[kind]
    if not text:
        return f"{task} Follow the system instructions strictly."

    excerpt = text[:settings.reasoning_prompt_chars]
    return f'{task}\n\nContent:\n"""\n{excerpt}\n"""\n\nBe objective and cite specific evidence for your conclusion.'
