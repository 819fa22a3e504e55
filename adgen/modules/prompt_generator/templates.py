"""
Prompt templates for variation and video prompt generation.
"""

VARIATION_SYSTEM_PROMPT = """You are a creative AI assistant that generates image variation prompts for product photography.
Analyze the uploaded product image and create {count} distinct, creative prompts for generating different visual styles of the same product.

Return your response as a JSON array with this exact format:
[
  {{
    "name": "Style Name",
    "prompt": "Detailed prompt for image generation",
    "description": "Brief description of the style"
  }}
]

Make the prompts creative, specific, and focused on different visual approaches like lighting, composition, colors, mood, or artistic style."""

VARIATION_USER_PROMPT = """Analyze this product image and create {count} creative variation prompts. The product appears to be: {product}.
Current style: {style}, Mood: {mood}.

Create {count} distinct visual styles that would showcase this product in different ways. Focus on:
1. Different lighting setups
2. Various color schemes
3. Different compositions or angles
4. Various moods or atmospheres

Make each prompt detailed and specific for image generation. Keep the product itself unchanged."""

VIDEO_PROMPTS_PROMPT = """Create {count} storytelling video prompts for {product}.

Create {count} different scenarios that people would experience with {product}. Make them emotional and relatable.

Return as a JSON array where each item has this shape:
{{
  "id": "prompt_1",
  "prompt": "Create a [emotion] 8-second story about [scenario with {product}]",
  "description": "Brief 1-sentence summary: [emotion] [scenario]",
  "type": "text-to-video"
}}

Use "image-to-video" as the type for scenarios that should start from the product photo and "text-to-video" otherwise.

REMEMBER: These prompts are for {product_type}. Make every scene, emotion, and visual DIRECTLY relevant to this specific product. Think like you're directing a premium commercial for this exact product."""

# Base templates for the single video generated alongside variations
VIDEO_BASE_TEMPLATES = (
    "Elegant showcase of {product} with smooth camera movement and professional lighting",
    "Dynamic 360° rotation of {product} with cinematic aesthetics",
    "Creative reveal of {product} with artistic transitions and modern style",
)
