"""
Модели базы данных для Daily Rewards Engine.

Структура:
- User: пользователь и его постоянные балансы (xp, currency, streak)
- Task: ежедневная задача с наградой
- Subtask: подзадача со своим дедлайном
- Submission: одна отметка на (user, task, subtask, civil_day)
- BonusSubmission: бонусная активность вне завершения задачи
- Reward: выданная награда (никогда не удаляется)
- DailyAccrual: прогресс дня пользователя + флаг settled
"""

from tortoise import fields, models


class User(models.Model):
    """Пользователь. Создаётся снаружи, балансы меняет только движок наград."""

    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=100)

    # Статистика
    xp = fields.IntField(default=0)
    currency_earned = fields.IntField(default=0)
    level = fields.IntField(default=1)
    streak_count = fields.IntField(default=0)
    streak_updated_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    submissions: fields.ReverseRelation["Submission"]
    rewards: fields.ReverseRelation["Reward"]
    daily_accruals: fields.ReverseRelation["DailyAccrual"]

    class Meta:
        table = "users"


class Task(models.Model):
    """Ежедневная задача. Для движка только чтение."""

    id = fields.IntField(primary_key=True)
    key = fields.CharField(max_length=64, unique=True)
    name = fields.CharField(max_length=200)
    description = fields.TextField(null=True)

    reward_xp = fields.IntField(default=0)
    reward_currency = fields.IntField(default=0)

    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    subtasks: fields.ReverseRelation["Subtask"]

    class Meta:
        table = "tasks"


class Subtask(models.Model):
    """
    Подзадача с дедлайном.

    deadline_kind: anytime | cutoff | window
    - cutoff: deadline_minutes от начала гражданского дня (1..1439)
    - window: [window_start_minutes, window_end_minutes] включительно
    """

    id = fields.IntField(primary_key=True)
    task: fields.ForeignKeyRelation[Task] = fields.ForeignKeyField(
        "models.Task", related_name="subtasks", on_delete=fields.CASCADE
    )
    task_id: int  # AICODE-NOTE: MyPy hint for FK (Tortoise auto-creates this)

    key = fields.CharField(max_length=64)
    name = fields.CharField(max_length=200)
    order = fields.IntField(default=0)

    deadline_kind = fields.CharField(max_length=10, default="anytime")
    deadline_minutes = fields.IntField(null=True)
    window_start_minutes = fields.IntField(null=True)
    window_end_minutes = fields.IntField(null=True)

    is_active = fields.BooleanField(default=True)

    class Meta:
        table = "subtasks"
        unique_together = (("task", "key"),)


class Submission(models.Model):
    """
    Отметка выполнения подзадачи.

    AICODE-NOTE: unique_together - это и есть гарантия "одна отметка на слот".
    Повторная отправка отклоняется, запись никогда не обновляется.
    """

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="submissions", on_delete=fields.CASCADE
    )
    user_id: int
    task: fields.ForeignKeyRelation[Task] = fields.ForeignKeyField(
        "models.Task", related_name="submissions", on_delete=fields.CASCADE
    )
    task_id: int

    subtask_key = fields.CharField(max_length=64)
    civil_day = fields.DateField()
    submitted_at = fields.DatetimeField()
    proof_reference = fields.CharField(max_length=1024)

    valid = fields.BooleanField()
    validation_reason = fields.CharField(max_length=20)
    validation_message = fields.CharField(max_length=255)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "submissions"
        unique_together = (("user", "task", "subtask_key", "civil_day"),)
        indexes = (("user_id", "civil_day"),)


class BonusSubmission(models.Model):
    """Бонусная активность (дополнительное видео и т.п.). Награда выдаётся сразу."""

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="bonus_submissions", on_delete=fields.CASCADE
    )
    user_id: int
    task: fields.ForeignKeyRelation[Task] = fields.ForeignKeyField(
        "models.Task", related_name="bonus_submissions", on_delete=fields.CASCADE
    )
    task_id: int

    subtask_key = fields.CharField(max_length=64)
    # additional_video | extra_activity
    bonus_type = fields.CharField(max_length=32)
    civil_day = fields.DateField()
    submitted_at = fields.DatetimeField()
    proof_reference = fields.CharField(max_length=1024)

    reward_xp = fields.IntField(default=0)
    reward_currency = fields.IntField(default=0)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "bonus_submissions"
        indexes = (("user_id", "civil_day"),)


class Reward(models.Model):
    """
    Выданная награда. Постоянный журнал выплат, не удаляется.

    source: "task" - за завершение задачи, "bonus:<id>" - за бонусную отметку.
    AICODE-NOTE: unique_together (user, task, civil_day, source) гарантирует
    одну награду за задачу в день и одну награду на бонусную отметку.
    """

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="rewards", on_delete=fields.CASCADE
    )
    user_id: int
    task: fields.ForeignKeyRelation[Task] = fields.ForeignKeyField(
        "models.Task", related_name="rewards", on_delete=fields.CASCADE
    )
    task_id: int

    civil_day = fields.DateField()
    source = fields.CharField(max_length=64, default="task")

    reward_xp = fields.IntField()
    reward_currency = fields.IntField()
    bonus_multiplier = fields.FloatField(default=1.0)
    bonus_reason = fields.CharField(max_length=255, null=True)

    awarded_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "rewards"
        unique_together = (("user", "task", "civil_day", "source"),)

    @property
    def total_xp(self) -> int:
        return round(self.reward_xp * self.bonus_multiplier)

    @property
    def total_currency(self) -> int:
        return round(self.reward_currency * self.bonus_multiplier)


class DailyAccrual(models.Model):
    """
    Прогресс дня пользователя.

    Создаётся при первой отметке дня, дополняется каждой следующей.
    После settled=True больше не меняется.
    """

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="daily_accruals", on_delete=fields.CASCADE
    )
    user_id: int

    civil_day = fields.DateField()

    # JSON: [{"task_id", "subtask_key", "valid", "submitted_at"}]
    completed_subtasks: list[dict] = fields.JSONField(default=list)

    # Награды, выданные за этот день
    xp_accrued = fields.IntField(default=0)
    currency_accrued = fields.IntField(default=0)
    tasks_rewarded = fields.IntField(default=0)

    settled = fields.BooleanField(default=False)
    settled_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "daily_accruals"
        unique_together = (("user", "civil_day"),)
        indexes = (("civil_day", "settled"),)
