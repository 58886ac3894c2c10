"""researchdown: turn model-generated research markup into portable Markdown."""
