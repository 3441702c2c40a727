"""
Design inspiration service - AI generated room design ideas saved per user.
"""

import logging
from typing import Dict, Any, Optional

from ai_service import AIService, AIServiceError

logger = logging.getLogger(__name__)

DESIGN_SYSTEM_PROMPT = (
    "You are an interior designer specialising in Indian homes. You suggest practical, "
    "culturally appropriate designs that work with Indian climate, materials and budgets."
)

DESIGN_PROMPT = """
Create a design inspiration for a {style} {room} in an Indian home.
{extra}
Please provide a JSON response with the following fields:
- description (string): A vivid two to three sentence description of the design
- tips (array of strings): Four practical tips for achieving this look in India

Only provide the JSON response, nothing else.
"""

IMAGE_PROMPT = (
    "Photorealistic interior photograph of a {style} {room} in a modern Indian home. {description}"
)


class DesignService:
    """Generates and stores design inspirations."""

    def __init__(self, ai_service: AIService, storage):
        self.ai_service = ai_service
        self.storage = storage

    def create_inspiration(self, user_id: str, room: str, style: str,
                           description: Optional[str] = None) -> Dict[str, Any]:
        extra = f"The homeowner adds: {description}\n" if description else ''
        prompt = DESIGN_PROMPT.format(room=room, style=style, extra=extra)

        try:
            result = self.ai_service.complete_json(DESIGN_SYSTEM_PROMPT, prompt)
        except AIServiceError as e:
            logger.error(f"Error generating design inspiration: {e}")
            raise

        text = result.get('description') or description
        if not text:
            raise AIServiceError("Failed to generate design inspiration: empty model response")
        tips = [str(tip) for tip in result.get('tips') or []]

        image_prompt = IMAGE_PROMPT.format(style=style, room=room, description=text)
        image_url = self._generate_image(image_prompt)

        inspiration = self.storage.create_design_inspiration({
            'userId': user_id,
            'room': room,
            'style': style,
            'description': text,
            'imageUrl': image_url,
            'prompt': image_prompt,
            'tips': tips,
        })
        logger.info(f"Design inspiration {inspiration['id']} created for user {user_id}")
        return inspiration

    def _generate_image(self, prompt: str) -> Optional[str]:
        if not self.ai_service.is_available('image'):
            return None
        try:
            return self.ai_service.generate_image(prompt)
        except AIServiceError as e:
            logger.warning(f"Image generation failed, saving inspiration without image: {e}")
            return None
