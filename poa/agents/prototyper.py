"""Prototyper prompts: HTML/Tailwind markup for a first draft, a refinement, or a variant.

Every prompt asks for the body fragment only: no <html>, <head> or <body>
wrapper, Tailwind utility classes only.
"""

_ROLE = "You are a world-class senior frontend engineer and UI/UX designer."

_MARKUP_RULES = """\
1. Use ONLY Tailwind CSS for all styling. Do not include any <style> tags, custom CSS classes, or inline style attributes.
2. The output should be only the HTML code for the body content. Do not include <html>, <head>, or <body> tags.
3. Create a visually appealing, clean, and modern layout. Use placeholder content where necessary.
4. Ensure the UI is responsive and well-structured.
5. Pay attention to spacing, typography, and component hierarchy.
6. Use SVG icons from a library like Heroicons (inline SVG) for any icons if needed."""

_IMAGE_RULE = (
    "7. The provided image is a wireframe or inspiration. Your generated UI should be a "
    "high-fidelity implementation based on its layout and components."
)


def build_prototype_prompt(requirements: str, has_image: bool = False) -> str:
    """Prompt for the first prototype. Blank requirements with an image use the image-only form."""
    if not requirements.strip() and has_image:
        return (
            f"{_ROLE}\n"
            "Based on the provided wireframe image, generate a complete, single HTML structure "
            "that represents a modern, high-fidelity UI wireframe.\n\n"
            f"Instructions:\n{_MARKUP_RULES}\n{_IMAGE_RULE}\n"
        )

    source = "user requirements and the provided wireframe image" if has_image else "user requirements"
    rules = f"{_MARKUP_RULES}\n{_IMAGE_RULE}" if has_image else _MARKUP_RULES
    return (
        f"{_ROLE}\n"
        f"Based on the following {source}, generate a complete, single HTML structure "
        "that represents a modern UI wireframe.\n\n"
        f"Instructions:\n{rules}\n\n"
        f'User Requirements:\n"{requirements}"\n'
    )


def build_refine_prompt(current_markup: str, instruction: str) -> str:
    return (
        "You are a world-class senior frontend engineer specializing in Tailwind CSS.\n"
        "You will be given an existing block of HTML code that uses Tailwind CSS and a user's "
        "instruction for how to modify it. Apply the requested changes and return the "
        "**complete, new HTML code for the body content**.\n\n"
        "Instructions:\n"
        "1. Analyze the provided HTML and the user's instruction carefully.\n"
        "2. Modify the HTML to implement the change. This might involve adding, removing, or "
        "altering elements and classes.\n"
        "3. Output ONLY the modified HTML code for the body content. No ```html fences, no "
        "<html>, <head> or <body> tags, no explanations.\n"
        "4. Maintain the use of ONLY Tailwind CSS for styling.\n\n"
        f"**Existing HTML Code:**\n```html\n{current_markup}\n```\n\n"
        f'**User\'s Instruction:**\n"{instruction}"\n'
    )


def build_variant_prompt(requirements: str, previous_markup: str, has_image: bool = False) -> str:
    """Prompt for an alternative design that must differ clearly from *previous_markup*."""
    image_note = "**Reference Image:**\n[Image was provided]\n\n" if has_image else ""
    return (
        f"{_ROLE}\n"
        "A UI has already been generated for the user's requirements. Your task is to create a "
        "**new and distinctly different UI variant**. Analyze the requirements and the previous "
        "UI, then generate a fresh alternative. Think about different layouts, color schemes, "
        "or component styles.\n\n"
        "Instructions:\n"
        "1. Use ONLY Tailwind CSS for all styling.\n"
        "2. The output should be only the HTML code for the body content. Do not include "
        "<html>, <head>, or <body> tags.\n"
        "3. Create a visually appealing, clean, and modern layout that is a clear alternative "
        "to the previous version.\n"
        "4. Ensure the UI is responsive and well-structured.\n\n"
        f'**User Requirements:**\n"{requirements}"\n\n'
        f"{image_note}"
        f"**Previous UI Version (to avoid duplicating):**\n```html\n{previous_markup}\n```\n"
    )
