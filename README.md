# cronbeat

`cronbeat` is an asyncio service that sends messages to a message broker on a
schedule. Each scheduled task has either a fixed interval (`DeltaSchedule`)
or a crontab-style schedule (`CronSchedule`). A `Beat` drives a `Scheduler`,
which keeps tasks in a `heapq` min-heap ordered by their next run time and
hands each due message to the broker.

## Installation

From a checkout of the project:

```
pip install .
```

The package has no dependencies outside the standard library.

## Schedules

### Interval schedules

```python
from datetime import timedelta
from cronbeat.schedule import DeltaSchedule

every_five_seconds = DeltaSchedule(timedelta(seconds=5))
every_half_second = DeltaSchedule(0.5)  # a number is taken as seconds
```

A `DeltaSchedule` runs a task right away, then once per interval after the
time of each run.

### Cron schedules

```python
from cronbeat.cron import CronSchedule

weekdays = CronSchedule.from_string("*/5 * * * mon-fri")
first_sunday_hours = CronSchedule.from_string("* 8-17 1 * sun")
```

A cron string has five fields separated by whitespace: minutes, hours, days of
the month, months and days of the week (0 is Sunday). Each field may be:

- a number, such as `3`
- a range, such as `2-5`
- a range with a step, such as `1-6/3`
- a wildcard `*`, or a wildcard with a step such as `*/4`
- a comma-separated list of any of the above, such as `8,2-4,1-5/2`

Months and weekdays also accept three-letter names, in any case (`jan`..`dec`,
`sun`..`sat`). The shorthands `@yearly`, `@monthly`, `@weekly`, `@daily` and
`@hourly` are accepted as well.

Pass a `tzinfo` to `from_string` to work in a time zone other than UTC. A
schedule can also be built directly from the values of each field:

```python
from datetime import timezone
from cronbeat.cron import CronSchedule

schedule = CronSchedule(
    [15, 30, 45, 59, 0],
    [0, 23],
    [1, 2, 3],
    [1, 2, 3, 4, 12],
    range(1, 7),
    timezone.utc,
)
```

Values are sorted and duplicates dropped; an empty field or a value out of
range raises `cronbeat.errors.CronScheduleError`, as does a malformed cron
string or an unknown shorthand.

`CronSchedule.next(now)` returns the first matching minute strictly after
`now`, or `None` if no date before the year 2100 matches (for example
`"* * 30 2 *"`). Wall-clock times that do not exist or are ambiguous in the
schedule's time zone are skipped. A naive `now` is taken to be in the
schedule's time zone.

The lower-level pieces are available too: `cronbeat.parsing.parse_longhand(s,
field)` parses one field into a sorted list of values, `parse_shorthand(s)`
returns a `Shorthand`, and `cronbeat.time_units.TimeUnitField` lists the five
fields with their ranges.

## Running a beat

A broker is any object with an async `send(message, queue)` method and an
async `reconnect(timeout)` method. Errors the broker raises should derive from
`cronbeat.errors.BrokerError`; a subclass of `BrokerConnectionError` (or any
error whose `is_connection_error()` returns `True`) marks a lost connection.
A message factory is any callable taking no arguments that returns the message
to send; it is called each time the task is due.

```python
from datetime import timedelta

from cronbeat.beat import Beat
from cronbeat.cron import CronSchedule
from cronbeat.schedule import DeltaSchedule


async def main(broker):
    beat = Beat(
        "my-beat",
        broker,
        task_routes=[("add", "math"), ("*", "celery")],
        max_sleep_duration=timedelta(seconds=30),
    )
    beat.schedule_task("add", lambda: {"task": "add", "args": [1, 2]},
                       DeltaSchedule(timedelta(seconds=5)))
    beat.schedule_task("report", lambda: {"task": "report"},
                       CronSchedule.from_string("*/2 * * * *"))
    await beat.start()
```

`Beat` takes, besides the name and broker: `scheduler_backend` (default
`LocalSchedulerBackend()`), `task_routes`, `default_queue` (default
`"celery"`), `broker_connection_timeout` (2), `broker_connection_retry`
(`True`), `broker_connection_max_retries` (5), `broker_connection_retry_delay`
in seconds (5) and `max_sleep_duration` (`None`, a `timedelta` or seconds).

Routing rules are `(glob pattern, queue)` pairs checked in order; the first
match picks the queue, and the default queue is used when none match.
`Beat.route(task_name)` returns the matching queue, or `None`. An explicit
`queue=` passed to `schedule_task` overrides the routes, and `name=` labels the
scheduled entry separately from the task name.

`Beat.start()` runs until an error stops it. If sending fails with a
connection error and connection retry is on, the beat tries to reconnect up to
`broker_connection_max_retries` times, waiting `broker_connection_retry_delay`
seconds before each attempt, and raises `NotConnectedError` if none succeeds.
Other errors are raised at once. A task whose send failed is still
rescheduled.

### Custom scheduler backends

Subclass `cronbeat.backend.SchedulerBackend` to keep the schedule in step with
an outside source such as a database. `should_sync()` is checked after every
tick, and when it returns `True`, `sync(scheduled_tasks)` is called with the
scheduler's heap, a list of `ScheduledTask` objects that must stay a valid
`heapq` heap. Setting `max_sleep_duration` limits how long the beat sleeps
between ticks, so the backend is checked often enough. Without tasks the
scheduler sleeps 500 milliseconds between ticks.

## What this package does not do

`cronbeat` contains no broker client: it does not connect to AMQP, Redis or
any other server itself, and leaves serialising messages to the message
factory. It has no worker that consumes or executes tasks, and no command-line
program; a beat is started from your own code with `await Beat.start()`.

## Running the tests

```
pip install -e ".[test]"
pytest
```