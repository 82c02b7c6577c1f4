"""Hook handling core: persona config, situation resolution and outcome logging."""
