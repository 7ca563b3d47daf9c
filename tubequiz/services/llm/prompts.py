from __future__ import annotations

QUESTION_SYSTEM = (
    "You are a helpful assistant that generates multiple choice questions. "
    "Always follow the exact format specified."
)

QUESTION_USER_TEMPLATE = """Generate a multiple choice question based on this text. The question should test understanding of key concepts. Format your response exactly like this example, six lines and nothing else:
Q: What is the capital of France?
A: Paris
B: London
C: Berlin
D: Madrid
CORRECT: A

Here's the text to generate a question from:
{content}"""
