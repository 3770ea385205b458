"""derivekit record code generator."""

from .catalogue import FieldDescriptor as FieldDescriptor
from .catalogue import TypeDescriptor as TypeDescriptor
from .catalogue import Visibility as Visibility
from .catalogue import build_descriptor as build_descriptor
from .errors import *
from .operations import Operation as Operation
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .planner import plan_each as plan_each
from .planner import plan_record as plan_record
from .python import RenderOptions as RenderOptions
from .python import generate as generate
from .python import load as load
from .python import render as render
from .types import *
