"""
Local Inference Worker
Runs transformers summarization pipelines away from the caller's thread.

The worker is a plain loop over two queues, so the same function serves as a
multiprocessing target (ProcessWorkerHost) and a thread target
(ThreadWorkerHost). Messages are dicts tagged with the caller's request id:

    request                                     response(s)
    {"id", "action": "ping"}                    {"id", "ready": True}
    {"id", "action": "summarize", "text",       {"id", "type": "progress", "progress", "status"}  (model load)
     "model", "max_length", "min_length"}       {"id", "success": True, "summary"}
                                                {"id", "success": False, "error"}
    TERMINATE                                   (loop exits)

Loaded pipelines are cached for the worker's lifetime, one per model id.
"""

import queue
import time
import traceback

from synopsis.config import QUEUE_TIMEOUT_SECONDS
from synopsis.logging_config import critical, debug_log

TERMINATE = "TERMINATE"

# Models trained with a task prefix (T5 family)
TASK_PREFIX_MODELS = ("t5",)
SUMMARIZE_PREFIX = "summarize: "


def load_summarization_pipeline(model_name: str):
    """
    Build a transformers summarization pipeline, preferring the GPU.

    Falls back to CPU when CUDA is missing or the accelerated load fails.
    """
    import torch
    from transformers import pipeline

    if torch.cuda.is_available():
        try:
            debug_log(f"[WORKER] Loading {model_name} on GPU")
            return pipeline("summarization", model=model_name, device=0)
        except (RuntimeError, OSError) as e:
            debug_log(f"[WORKER] GPU load failed for {model_name}, falling back to CPU: {e}")

    debug_log(f"[WORKER] Loading {model_name} on CPU")
    return pipeline("summarization", model=model_name, device=-1)


class PipelineCache:
    """
    Per-worker cache of loaded summarization pipelines.

    No eviction: each distinct model stays resident until the worker exits.
    """

    def __init__(self, pipeline_factory=None):
        self._factory = pipeline_factory or load_summarization_pipeline
        self._pipelines = {}

    def get(self, model_name: str, on_progress=None):
        """Return the pipeline for model_name, loading it on first use."""
        if model_name in self._pipelines:
            return self._pipelines[model_name]

        if on_progress:
            on_progress(15, f"Loading model {model_name}...")
        start_time = time.time()

        self._pipelines[model_name] = self._factory(model_name)

        debug_log(f"[WORKER] Model {model_name} loaded in {time.time() - start_time:.2f}s")
        if on_progress:
            on_progress(50, "Model ready!")
        return self._pipelines[model_name]

    def summarize(self, text: str, model_name: str, max_length: int, min_length: int, on_progress=None) -> str:
        summarizer = self.get(model_name, on_progress)

        if any(marker in model_name.lower() for marker in TASK_PREFIX_MODELS):
            text = SUMMARIZE_PREFIX + text

        result = summarizer(
            text,
            max_length=max_length,
            min_length=min_length,
            do_sample=False,
            truncation=True,
        )
        return result[0]['summary_text']


def inference_worker_process(request_queue, response_queue, pipeline_factory=None):
    """
    Target function for the local inference worker (process or thread).
    """
    cache = PipelineCache(pipeline_factory)
    debug_log("[WORKER] Inference worker started.")

    try:
        while True:
            try:
                task = request_queue.get(timeout=QUEUE_TIMEOUT_SECONDS)
            except queue.Empty:
                continue

            if task == TERMINATE:
                debug_log("[WORKER] Termination signal received. Exiting.")
                break

            response_queue.put(_handle_task(task, cache, response_queue))
    except Exception as e:
        critical(f"[WORKER] Inference worker crashed: {e}\n{traceback.format_exc()}")
        raise
    finally:
        debug_log("[WORKER] Inference worker finished.")


def _handle_task(task: dict, cache: PipelineCache, response_queue) -> dict:
    request_id = task.get('id')
    action = task.get('action')

    if action == 'ping':
        return {'id': request_id, 'ready': True}

    if action != 'summarize':
        return {'id': request_id, 'success': False, 'error': f"Unknown action: {action!r}"}

    def send_progress(percent, status):
        response_queue.put({'id': request_id, 'type': 'progress', 'progress': percent, 'status': status})

    start_time = time.time()
    try:
        debug_log(
            f"[WORKER] Summarize #{request_id}: {len(task['text'])} chars, model={task['model']}, "
            f"length {task['min_length']}-{task['max_length']}"
        )
        summary = cache.summarize(
            task['text'],
            task['model'],
            max_length=task['max_length'],
            min_length=task['min_length'],
            on_progress=send_progress,
        )
    except Exception as e:
        debug_log(f"[WORKER] Summarize #{request_id} failed: {e}\n{traceback.format_exc()}")
        return {'id': request_id, 'success': False, 'error': str(e)}

    debug_log(f"[WORKER] Summarize #{request_id} done in {time.time() - start_time:.2f}s")
    return {'id': request_id, 'success': True, 'summary': summary}
