class Params:
    """
    All tunable knobs live here so you don't hunt through code.

    Times are in milliseconds (the same clock the app feeds into tick()).
    """
    def __init__(self, **overrides):
        # Population (fixed for the lifetime of the engine)
        self.num_particles = 8000
        self.seed = None            # None => fresh entropy each run

        # Seeding + burn-in
        self.seed_half_extent = 1.0 # seed cube is [-1, 1]^3 (+ per-field offset)
        self.burn_in_min = 50       # inclusive
        self.burn_in_max = 349      # inclusive

        # Divergence repair
        self.divergence_bound = 200.0

        # Rendering scale
        self.min_view_distance = 5.0

        # Particle colors (HSL, hue comes from the field)
        self.saturation_min = 0.7
        self.saturation_span = 0.3
        self.lightness_min = 0.5
        self.lightness_span = 0.3

        # Morph
        self.transition_ms = 1200.0
        self.camera_ease = 0.02     # per tick, NOT scaled by the morph ease

        # Fist detection
        self.curl_ratio = 1.2       # tip closer than 1.2x base distance => curled
        self.curled_for_closed = 3  # of 4 fingers
        self.debounce_ms = 1000.0

        # Viewpoint
        self.view_smoothing = 0.1   # per tick, per axis
        self.view_height = 20.0     # palm y in [-1, 1] maps to -20..20
        self.auto_orbit_speed = 0.4 # OrbitControls units (2*pi/60/60 rad per tick per unit)

        self.start_field = "lorenz"

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown param: {key}")
            setattr(self, key, value)


def _pget(p, key, default=None):
    if p is None:
        return default
    if isinstance(p, dict):
        return p.get(key, default)
    return getattr(p, key, default)
