"""Hidden message uncovered by digging.

The daily quote is rasterized to an alpha mask the size of the garden and
thresholded into a per-cell boolean mask.
"""

import datetime

import numpy as np
from PIL import Image, ImageDraw, ImageFont

QUOTES = [
    "The obstacle is the path.",
    "Be still and know.",
    "Let go or be dragged.",
    "This too shall pass.",
    "Be where you are.",
    "Breathe in calm, breathe out tension.",
    "Peace comes from within.",
    "The present moment is all you have.",
    "Silence is the language of the soul.",
    "In stillness, find your strength.",
    "Flow like water.",
    "Nothing is permanent.",
    "Simplicity is the ultimate sophistication.",
    "The journey is the reward.",
    "Be patient with yourself.",
    "Every moment is a fresh beginning.",
    "Less is more.",
    "Find beauty in imperfection.",
    "The mind is everything.",
    "Seek peace within.",
    "Do not dwell in the past.",
    "What you think, you become.",
    "The only way out is through.",
    "Embrace the unknown.",
    "Still water runs deep.",
    "Where there is peace, there is growth.",
    "One step at a time.",
    "Your calm is your power.",
    "The quieter you become, the more you hear.",
    "Let it be.",
    "Nature does not hurry, yet everything is accomplished.",
    "Happiness is a direction, not a place.",
    "To understand everything is to forgive everything.",
    "The mind is its own place.",
    "Fall seven times, stand up eight.",
    "When you realize nothing is lacking, the world belongs to you.",
    "Do not seek, do not search, do not ask, do not knock. It will find you.",
    "Before enlightenment, chop wood, carry water.",
    "Zen is not some kind of excitement, but concentration on our usual everyday routine.",
    "When walking, walk. When eating, eat.",
    "No snowflake ever falls in the wrong place.",
    "The only Zen you find on mountaintops is the Zen you bring there.",
    "Sitting quietly, doing nothing, spring comes, and the grass grows by itself.",
    "To a mind that is still, the whole universe surrenders.",
    "If you are depressed, you are living in the past. If you are anxious, you are living in the future.",
    "The best time to plant a tree was twenty years ago. The second best time is now.",
    "A flower does not think of competing with the flower next to it. It just blooms.",
    "Mountains do not rise without earthquakes.",
    "You cannot see your reflection in boiling water.",
    "What the caterpillar calls the end, the rest of the world calls a butterfly.",
]

MIN_FONT_SIZE = 14
MAX_WIDTH_FRAC = 0.75
MAX_HEIGHT_FRAC = 0.6
LINE_HEIGHT = 1.4
ALPHA_THRESHOLD = 128


def daily_quote(today=None, quotes=QUOTES):
    """Quote of the day, rotating by day of the year (Jan 1 is day 1)."""
    if today is None:
        today = datetime.date.today()
    return quotes[today.timetuple().tm_yday % len(quotes)]


def _wrap(draw, text, font, max_width):
    lines = []
    line = ''
    for word in text.split(' '):
        test = f"{line} {word}" if line else word
        if draw.textlength(test, font=font) > max_width and line:
            lines.append(line)
            line = word
        else:
            line = test
    if line:
        lines.append(line)
    return lines


def rasterize_text(text, width, height):
    """Render centred, word-wrapped text into a (height, width) alpha mask.

    The font starts at 12% of the shorter side and shrinks in steps of 2
    until the wrapped block is under 60% of the height (or hits 14 px).

    Returns:
        numpy uint8 array of shape (height, width), values 0-255.
    """
    img = Image.new('L', (width, height), 0)
    draw = ImageDraw.Draw(img)

    font_size = int(min(width, height) * 0.12)
    font = ImageFont.load_default(size=max(font_size, MIN_FONT_SIZE))
    lines = _wrap(draw, text, font, width * MAX_WIDTH_FRAC)
    while font_size >= MIN_FONT_SIZE:
        font = ImageFont.load_default(size=font_size)
        lines = _wrap(draw, text, font, width * MAX_WIDTH_FRAC)
        if len(lines) * font_size * LINE_HEIGHT < height * MAX_HEIGHT_FRAC:
            break
        font_size -= 2
    font_size = max(font_size, MIN_FONT_SIZE)

    line_h = font_size * LINE_HEIGHT
    start_y = (height - len(lines) * line_h) / 2 + line_h / 2
    for i, line in enumerate(lines):
        line_w = draw.textlength(line, font=font)
        draw.text(((width - line_w) / 2, start_y + i * line_h - font_size / 2),
                  line, font=font, fill=255)

    return np.array(img)


def build_reveal_mask(text, width, height, rasterizer=rasterize_text):
    """Flat boolean mask (length width*height) of the cells covered by text."""
    alpha = np.asarray(rasterizer(text, width, height))
    if alpha.shape != (height, width):
        raise ValueError(
            f"rasterizer returned {alpha.shape}, expected {(height, width)}")
    return (alpha > ALPHA_THRESHOLD).ravel()
