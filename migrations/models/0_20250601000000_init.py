from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(100) NOT NULL,
    "xp" INT NOT NULL DEFAULT 0,
    "currency_earned" INT NOT NULL DEFAULT 0,
    "level" INT NOT NULL DEFAULT 1,
    "streak_count" INT NOT NULL DEFAULT 0,
    "streak_updated_at" TIMESTAMPTZ,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON TABLE "users" IS 'Пользователь. Создаётся снаружи, балансы меняет только движок наград.';
CREATE TABLE IF NOT EXISTS "tasks" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "key" VARCHAR(64) NOT NULL UNIQUE,
    "name" VARCHAR(200) NOT NULL,
    "description" TEXT,
    "reward_xp" INT NOT NULL DEFAULT 0,
    "reward_currency" INT NOT NULL DEFAULT 0,
    "is_active" BOOL NOT NULL DEFAULT True,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON TABLE "tasks" IS 'Ежедневная задача. Для движка только чтение.';
CREATE TABLE IF NOT EXISTS "subtasks" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "key" VARCHAR(64) NOT NULL,
    "name" VARCHAR(200) NOT NULL,
    "order" INT NOT NULL DEFAULT 0,
    "deadline_kind" VARCHAR(10) NOT NULL DEFAULT 'anytime',
    "deadline_minutes" INT,
    "window_start_minutes" INT,
    "window_end_minutes" INT,
    "is_active" BOOL NOT NULL DEFAULT True,
    "task_id" INT NOT NULL REFERENCES "tasks" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_subtasks_task_id_5c1f0e" UNIQUE ("task_id", "key")
);
CREATE TABLE IF NOT EXISTS "submissions" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "subtask_key" VARCHAR(64) NOT NULL,
    "civil_day" DATE NOT NULL,
    "submitted_at" TIMESTAMPTZ NOT NULL,
    "proof_reference" VARCHAR(1024) NOT NULL,
    "valid" BOOL NOT NULL,
    "validation_reason" VARCHAR(20) NOT NULL,
    "validation_message" VARCHAR(255) NOT NULL,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "task_id" INT NOT NULL REFERENCES "tasks" ("id") ON DELETE CASCADE,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_submissions_user_id_8a3d2b" UNIQUE ("user_id", "task_id", "subtask_key", "civil_day")
);
CREATE INDEX IF NOT EXISTS "idx_submissions_user_id_e41b7c" ON "submissions" ("user_id", "civil_day");
CREATE TABLE IF NOT EXISTS "bonus_submissions" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "subtask_key" VARCHAR(64) NOT NULL,
    "bonus_type" VARCHAR(32) NOT NULL,
    "civil_day" DATE NOT NULL,
    "submitted_at" TIMESTAMPTZ NOT NULL,
    "proof_reference" VARCHAR(1024) NOT NULL,
    "reward_xp" INT NOT NULL DEFAULT 0,
    "reward_currency" INT NOT NULL DEFAULT 0,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "task_id" INT NOT NULL REFERENCES "tasks" ("id") ON DELETE CASCADE,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS "idx_bonus_submi_user_id_3f9d51" ON "bonus_submissions" ("user_id", "civil_day");
CREATE TABLE IF NOT EXISTS "rewards" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "civil_day" DATE NOT NULL,
    "source" VARCHAR(64) NOT NULL DEFAULT 'task',
    "reward_xp" INT NOT NULL,
    "reward_currency" INT NOT NULL,
    "bonus_multiplier" DOUBLE PRECISION NOT NULL DEFAULT 1,
    "bonus_reason" VARCHAR(255),
    "awarded_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "task_id" INT NOT NULL REFERENCES "tasks" ("id") ON DELETE CASCADE,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_rewards_user_id_b7e2c4" UNIQUE ("user_id", "task_id", "civil_day", "source")
);
COMMENT ON TABLE "rewards" IS 'Выданная награда. Постоянный журнал выплат, не удаляется.';
CREATE TABLE IF NOT EXISTS "daily_accruals" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "civil_day" DATE NOT NULL,
    "completed_subtasks" JSONB NOT NULL,
    "xp_accrued" INT NOT NULL DEFAULT 0,
    "currency_accrued" INT NOT NULL DEFAULT 0,
    "tasks_rewarded" INT NOT NULL DEFAULT 0,
    "settled" BOOL NOT NULL DEFAULT False,
    "settled_at" TIMESTAMPTZ,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_daily_accru_user_id_0d6a9f" UNIQUE ("user_id", "civil_day")
);
CREATE INDEX IF NOT EXISTS "idx_daily_accru_civil_d_72c8e1" ON "daily_accruals" ("civil_day", "settled");
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        """
