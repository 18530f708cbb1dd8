from promptswitch.extensions import db

# Fields a prompt record carries, in column order
PROMPT_FIELDS = ("id", "name", "content", "description", "enabled", "created_at", "updated_at")


class Prompt(db.Model):
    """A named prompt text. At most one row has ``enabled`` set.

    Timestamps are plain integers (seconds since the Unix epoch) written by
    the service layer, never defaulted by the database.
    """

    __tablename__ = "prompts"

    id = db.Column(db.String(255), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    enabled = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.Integer, nullable=True, index=True)
    updated_at = db.Column(db.Integer, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "description": self.description,
            "enabled": bool(self.enabled),
            "created_at": int(self.created_at) if self.created_at is not None else None,
            "updated_at": int(self.updated_at) if self.updated_at is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Prompt":
        fields = {key: data.get(key) for key in PROMPT_FIELDS}
        fields["enabled"] = bool(fields["enabled"])
        return cls(**fields)

    def __repr__(self):
        return f"<Prompt {self.id}: {self.name}>"
