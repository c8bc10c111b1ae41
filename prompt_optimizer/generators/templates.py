"""Requests sent to language models that propose prompts or outputs."""

TEACHER_TEMPLATE = """You are an expert teacher model. Given the following input, provide a high-quality, accurate output.

Input: {input}

Provide only the output, without any additional explanation:"""

MUTATION_TEMPLATE = """Rewrite the following instruction so that it keeps the same task but is clearer and more effective for a language model.

Instruction:
{prompt}

Respond with the rewritten instruction only."""

VARIATION_TEMPLATE = """You are improving the instruction given to a language model.

Current instruction:
{prompt}

Examples of the task:
{examples}

Write one improved variation of the instruction. It must describe the same task, be self-contained and work for every example above.
Respond with the new instruction only."""
