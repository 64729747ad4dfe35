"""
MIT License

Copyright (c) 2017 cgalleguillosm

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""
from agingsched.base.broker_class import Broker
from agingsched.base.engine_class import ExecutionEngine
from agingsched.utils.misc import current_time_millis


class Cloudlet:

    def __init__(self, cloudlet_id, length):
        self.id = cloudlet_id
        self.length = length
        self.status = None
        self.vm_id = None
        self.start_time = None
        self.finish_time = None


class SpaceSharedEngine(ExecutionEngine):
    """
    Toy engine: VMs run one cloudlet at a time, cloudlets are bound to the VMs round robin in submission order.
    """

    def __init__(self, vms=4, mips=250):
        self.vms = vms
        self.mips = mips

    def submit_batch(self, payloads):
        vm_time = [0.0] * self.vms
        for i, cloudlet in enumerate(payloads):
            vm_id = i % self.vms
            cloudlet.vm_id = vm_id
            cloudlet.start_time = vm_time[vm_id]
            cloudlet.finish_time = cloudlet.start_time + cloudlet.length / self.mips
            cloudlet.status = 'Success'
            vm_time[vm_id] = cloudlet.finish_time
        return sorted(payloads, key=lambda c: c.finish_time)


levels = [2, 1, 5, 6, 3, 4, 2, 5]
cloudlets = [Cloudlet(i, 250000) for i in range(len(levels))]

broker = Broker(SpaceSharedEngine(), LOG_LEVEL='DEBUG', pprint_output=True, RESULTS_FOLDER_PATH='results/')
start = current_time_millis()
batch = broker.assemble(enumerate(levels), cur_time=start)

# Each job is refreshed 2 seconds after the previous one
for i in batch.ids:
    broker.refresh(batch, cur_time=start + 2000 * (i + 1), ids=[i])

results = broker.submit(batch, cloudlets, refresh=False)
print('{:>11} {:>8} {:>6} {:>10} {:>12}'.format('Cloudlet ID', 'STATUS', 'VM ID', 'Start Time', 'Finish Time'))
for c in results:
    print('{:>11} {:>8} {:>6} {:>10.2f} {:>12.2f}'.format(c.id, c.status, c.vm_id, c.start_time, c.finish_time))
