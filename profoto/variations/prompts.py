"""
Builds the instruction text sent to the image model for one style.
"""
from .styles import StyleDescriptor


def compose_prompt(user_note: str, style: StyleDescriptor) -> str:
    """
    Combine the optional user note with a preset style.

    Args:
        user_note: Free-text background description from the user, may be empty
        style: Style preset to follow

    Returns:
        Instruction text for the image model
    """
    if user_note:
        return (
            "Act as a product photographer. The main subject is the input image. "
            f'Change the background according to this description: "{user_note}". '
            f"The visual style must follow this direction: {style.style_prompt} "
            "Make sure the product looks realistic and blends naturally with the background."
        )

    return (
        "Act as a professional product photographer. The main subject is the input image. "
        f"Create a stunning product photo in this style: {style.style_prompt} "
        "Make sure the lighting and shadows are realistic."
    )
