BACKGROUND_COLOR = (175.0, 175.0, 175.0)


class SceneSettings:
    def __init__(self, background_color=BACKGROUND_COLOR, max_recursions=4, ambient_occlusion_samples=0):
        self.background_color = background_color
        self.max_recursions = max_recursions
        self.ambient_occlusion_samples = ambient_occlusion_samples

    def to_dict(self):
        return {
            'background_color': list(self.background_color),
            'max_recursions': self.max_recursions,
            'ambient_occlusion_samples': self.ambient_occlusion_samples,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            tuple(data.get('background_color', BACKGROUND_COLOR)),
            int(data.get('max_recursions', 4)),
            int(data.get('ambient_occlusion_samples', 0)),
        )
