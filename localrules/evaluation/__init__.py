from localrules.evaluation._loo import EvaluationResult
from localrules.evaluation._loo import leave_one_out
from localrules.evaluation._loo import train_test
from localrules.evaluation.metrics import ClassificationReport
from localrules.evaluation.metrics import ClassMetrics
