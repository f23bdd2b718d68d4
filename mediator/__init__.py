"""
Semantic Mediator

Translates and reconciles data exchanged between independent stages of a
content pipeline, and builds adaptive, history-aware validation contexts.

Packages:
    mediator.cache               Similarity-retrieving transformation cache
    mediator.transformation      Path generation, execution and validation
    mediator.validation_context  Adaptive validation context generation
    mediator.resolution          Priority-ordered conflict resolution strategies
    mediator.llm                 Content-generation providers and service
    mediator.prompts             Prompt templates
    mediator.service             ``SemanticMediator`` facade and ``build_mediator``
"""

__version__ = "0.3.0"
