"""
Cost estimation service - renovation and new construction estimates for the
Indian market, priced in INR by the configured language model.
"""

import logging
from typing import Dict, Any

from ai_service import AIService, AIServiceError, AIRateLimitError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "AI provider rate limit exceeded. Please try again later or contact support for assistance."
)

RENOVATION_SYSTEM_PROMPT = (
    "You are a professional renovation cost estimator with 20 years of experience in the "
    "Indian construction industry. Provide costs in Indian Rupees (INR) using Indian market rates."
)

CONSTRUCTION_SYSTEM_PROMPT = (
    "You are a professional construction cost estimator with 20 years of experience in the "
    "Indian construction industry. Provide costs in Indian Rupees (INR) using Indian market rates."
)

RENOVATION_PROMPT = """
Generate a detailed cost estimation for a {renovationType} renovation project in India.

Project details:
- Type: {renovationType}
- Square footage: {squareFootage} sq ft
- Quality level: {qualityLevel}
- Location: {location}, India
- Scope: {scope}

Please provide a JSON response with the following fields:
- totalCostMin (number): Minimum total cost estimate in Indian Rupees (INR)
- totalCostMax (number): Maximum total cost estimate in Indian Rupees (INR)
- breakdown (object): Cost breakdown with the following fields:
  - materials (object): Min and max cost for materials in INR
  - labor (object): Min and max cost for labor in INR
  - fixtures (object): Min and max cost for fixtures and appliances in INR
  - permits (number): Estimated permit costs in INR
- recommendations (string): Three practical cost-saving recommendations applicable in India
- timeline (string): Estimated project timeline for Indian construction standards

Base your estimates on current Indian construction market prices.
Only provide the JSON response, nothing else.
"""

CONSTRUCTION_PROMPT = """
Generate a detailed cost estimation for a {constructionType} construction project in India.

Project details:
- Type: {constructionType}
- Square footage: {squareFootage} sq ft
- Number of stories: {stories}
- Quality level: {qualityLevel}
- Location: {location}, India
- Lot size: {lotSize}
- Additional details: {details}

Please provide a JSON response with the following fields:
- totalCostMin (number): Minimum total cost estimate in Indian Rupees (INR)
- totalCostMax (number): Maximum total cost estimate in Indian Rupees (INR)
- breakdown (object): Cost breakdown with the following fields:
  - foundation (object): Min and max cost for foundation in INR
  - framing (object): Min and max cost for framing in INR
  - exterior (object): Min and max cost for exterior finishes in INR
  - interior (object): Min and max cost for interior finishes in INR
  - mechanical (object): Min and max cost for mechanical systems in INR
  - permits (number): Estimated permit costs in INR
- recommendations (string): Three practical cost-saving recommendations applicable in India
- timeline (string): Estimated project timeline for Indian construction standards

Base your estimates on current Indian construction market prices.
Only provide the JSON response, nothing else.
"""

RENOVATION_RANGES = ('materials', 'labor', 'fixtures')
CONSTRUCTION_RANGES = ('foundation', 'framing', 'exterior', 'interior', 'mechanical')


def _group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way: 12,34,56,789."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def format_inr(amount) -> str:
    """
    Format a rupee amount with the symbol and Indian digit grouping.

    >>> format_inr(150000)
    '₹1,50,000'
    """
    if isinstance(amount, bool) or amount is None:
        raise TypeError(f"Not a currency amount: {amount!r}")
    value = round(float(amount), 2)
    sign = '-' if value < 0 else ''
    whole, _, fraction = f"{abs(value):.2f}".partition('.')
    fraction = fraction.rstrip('0')
    formatted = _group_indian(whole)
    if fraction:
        formatted = f"{formatted}.{fraction}"
    return f"{sign}₹{formatted}"


def format_inr_range(low, high) -> str:
    return f"{format_inr(low)} - {format_inr(high)}"


class EstimationService:
    """Turns validated estimate requests into formatted INR estimates."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    def estimate_renovation(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Estimate a renovation.

        Raises:
            AIRateLimitError: provider quota or rate limit exhausted
            AIServiceError: any other failure, including incomplete model output
        """
        return self._estimate(
            kind='renovation',
            system=RENOVATION_SYSTEM_PROMPT,
            prompt=RENOVATION_PROMPT.format(**data),
            ranges=RENOVATION_RANGES,
        )

    def estimate_construction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Estimate a new construction project. Raises like estimate_renovation."""
        fields = dict(data)
        fields.setdefault('lotSize', 'Not specified')
        fields['lotSize'] = fields['lotSize'] or 'Not specified'
        fields['details'] = fields.get('details') or 'None'
        return self._estimate(
            kind='construction',
            system=CONSTRUCTION_SYSTEM_PROMPT,
            prompt=CONSTRUCTION_PROMPT.format(**fields),
            ranges=CONSTRUCTION_RANGES,
        )

    def _estimate(self, kind: str, system: str, prompt: str, ranges) -> Dict[str, Any]:
        try:
            result = self.ai_service.complete_json(system, prompt)
            breakdown = result['breakdown']
            formatted = {
                name: format_inr_range(breakdown[name]['min'], breakdown[name]['max'])
                for name in ranges
            }
            formatted['permits'] = format_inr(breakdown['permits'])
            estimate = {
                'totalCost': format_inr_range(result['totalCostMin'], result['totalCostMax']),
                'breakdown': formatted,
                'recommendations': result.get('recommendations'),
                'timeline': result.get('timeline'),
                'raw': result,
            }
        except AIRateLimitError as e:
            logger.error(f"Error estimating {kind} cost: {e}")
            raise AIRateLimitError(RATE_LIMIT_MESSAGE) from e
        except AIServiceError as e:
            logger.error(f"Error estimating {kind} cost: {e}")
            raise AIServiceError(f"Failed to generate {kind} cost estimate: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error estimating {kind} cost: incomplete model output ({e!r})")
            raise AIServiceError(
                f"Failed to generate {kind} cost estimate: incomplete estimate ({e!r})"
            ) from e

        logger.info(f"Generated {kind} estimate: {estimate['totalCost']}")
        return estimate
