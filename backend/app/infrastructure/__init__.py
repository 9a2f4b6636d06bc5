"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .text_client import TextGenerator, create_text_generator

__all__ = ['TextGenerator', 'create_text_generator']
