"""Chapter markup preparation pipeline."""
