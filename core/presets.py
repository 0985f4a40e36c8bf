# core/presets.py

from core.models import OutputPreset

OUTPUT_PRESETS: list[OutputPreset] = [
    OutputPreset(
        id="mp4-h264-vtb",
        label="MP4 (H.264 VideoToolbox + AAC)",
        ext="mp4",
        args=("-c:v", "h264_videotoolbox", "-b:v", "5M", "-c:a", "aac", "-b:a", "160k"),
    ),
    OutputPreset(
        id="mp4-hevc-vtb",
        label="MP4 (HEVC VideoToolbox + AAC)",
        ext="mp4",
        args=("-c:v", "hevc_videotoolbox", "-b:v", "4M", "-tag:v", "hvc1",
              "-c:a", "aac", "-b:a", "160k"),
    ),
    OutputPreset(
        id="mp4-h264-x264",
        label="MP4 (H.264 libx264 CRF 23 + AAC)",
        ext="mp4",
        args=("-c:v", "libx264", "-crf", "23", "-preset", "medium", "-c:a", "aac", "-b:a", "160k"),
    ),
    OutputPreset(
        id="m4a-aac",
        label="M4A (AAC 256 kbps)",
        ext="m4a",
        args=("-vn", "-c:a", "aac", "-b:a", "256k"),
    ),
    OutputPreset(
        id="wav",
        label="WAV (PCM 48kHz)",
        ext="wav",
        args=("-vn", "-c:a", "pcm_s16le", "-ar", "48000"),
    ),
]


def get_preset(preset_id: str) -> OutputPreset:
    """Look a preset up by id; unknown ids fall back to the first one."""
    return next((p for p in OUTPUT_PRESETS if p.id == preset_id), OUTPUT_PRESETS[0])


def required_encoders(preset: OutputPreset) -> list[str]:
    """Encoders named by the preset's -c:v / -c:a flags ("copy" excluded)."""
    names = []
    args = list(preset.args)
    for flag, value in zip(args, args[1:]):
        if flag in ("-c:v", "-c:a") and value != "copy":
            names.append(value)
    return names
