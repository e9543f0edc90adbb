"""Synthesis output contracts.

Each template describes the breakdown sections, the character band for the
final prompt and its writing style. The Synthesizer renders whichever one is
configured, so changing the output schema never touches the controller.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SynthesisTemplate:
    name: str
    prompt_title: str
    min_chars: int
    max_chars: int
    sections: tuple[tuple[str, str], ...]   # (breakdown key, what goes in it)
    style_rules: tuple[str, ...]
    min_shots: int = 3
    max_shots: int = 6

    def section_keys(self) -> list[str]:
        return [key for key, _ in self.sections] + ["hashtags"]

    def band_label(self) -> str:
        if self.min_chars <= 0:
            return f"under {self.max_chars} characters"
        return f"{self.min_chars}-{self.max_chars} characters"


SHORT_FORM = SynthesisTemplate(
    name="short_form",
    prompt_title="OPTIMIZED VIDEO PROMPT",
    min_chars=0,
    max_chars=500,
    sections=(
        ("scene_structure", "Scene structure with timestamps"),
        ("visual_specs", "Aspect ratio, lighting, camera and color"),
        ("audio", "GENERIC music moods and styles only, no specific songs or artists"),
        ("platform_optimization", "Platform-specific optimization notes"),
    ),
    style_rules=(
        "Concise, technical format optimized for the video model",
        "Preserve critical visual and narrative elements",
        "Remove redundancy",
    ),
)

CINEMATIC = SynthesisTemplate(
    name="cinematic",
    prompt_title="CINEMATIC NARRATIVE PROMPT",
    min_chars=800,
    max_chars=1000,
    sections=(
        ("scene_setup", "Environment, time of day, weather and mood (about 20% of the prompt)"),
        ("subject_action", "Who is on screen, their actions and emotional beats with timing (about 30%)"),
        ("camera_direction", "Shot type, lens, movement and framing (about 25%)"),
        ("lighting_atmosphere", "Light sources, direction, quality and color palette (about 15%)"),
        ("audio_cue", "Foley, ambience and generic music mood (about 10%)"),
    ),
    style_rules=(
        "Natural prose written as a director's shot notes, no bullet points",
        "Balance narrative and technical detail roughly half and half",
        "Professional cinematography terms without abbreviations",
    ),
)

ULTRA_DETAILED = SynthesisTemplate(
    name="ultra_detailed",
    prompt_title="PRODUCTION-DOCUMENT PROMPT",
    min_chars=2000,
    max_chars=3000,
    sections=(
        ("format_and_look", "Duration, shutter angle, capture format, grain and optical effects"),
        ("lenses_and_filtration", "Focal lengths, spherical or anamorphic glass, filtration"),
        ("grade_and_palette", "Highlights, mids and blacks treatment"),
        ("lighting_and_atmosphere", "Key, fill, negative fill, practicals and atmospherics"),
        ("location_and_framing", "Location plus foreground, midground and background, with what to avoid"),
        ("wardrobe_props_extras", "Main subject, characters exactly as described, extras and props"),
        ("sound", "Diegetic or non-diegetic approach, sound elements, levels, exclusions"),
        ("camera_notes", "Eyeline, optical effects, handheld quality and exposure guidance"),
        ("finishing", "Grain overlay, halation, LUT, mix priorities and poster frame"),
    ),
    style_rules=(
        "Structured technical sections with professional terminology",
        "Specific measurements, focal lengths and color treatments",
        "Character descriptions are locked and must be reproduced exactly",
    ),
    min_shots=2,
    max_shots=4,
)

TEMPLATES: dict[str, SynthesisTemplate] = {t.name: t for t in (SHORT_FORM, CINEMATIC, ULTRA_DETAILED)}


def get_template(name: str) -> SynthesisTemplate:
    """Raises KeyError listing the known templates when the name is unknown."""
    try:
        return TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown synthesis template '{name}'. Known: {', '.join(sorted(TEMPLATES))}") from None
